import pytest

from zapdeploy.exceptions import CyclicDependency, MissingDependency
from zapdeploy.orchestrator import Orchestrator
from zapdeploy.step import Step


def _names(steps):
    return [step.name for step in steps]


def test_all_providers_of_a_tag_run_first(get_orchestrator, backend):
    consumer = Step(name="C", dependencies=["T"])
    a = Step(name="A", tags=["T"])
    b = Step(name="B", tags=["T", "Extra"])
    orchestrator = get_orchestrator([consumer, a, b])

    assert _names(orchestrator.plan()) == ["A", "B", "C"]

    orchestrator.run()
    assert backend.deployed_names() == ["A", "B", "C"]


def test_dependency_record_unreadable_before_deployment(get_orchestrator):
    orchestrator = get_orchestrator([Step(name="A"), Step(name="B", dependencies=["A"])])
    context = orchestrator.context_for(orchestrator.steps["B"])
    with pytest.raises(MissingDependency):
        context.deployments.get("A")


def test_plan_is_deterministic(get_orchestrator):
    steps = [Step(name=name) for name in ("Z", "Y", "X")]
    assert _names(get_orchestrator(steps).plan()) == ["Z", "Y", "X"]


def test_cycle_is_rejected(get_orchestrator, backend):
    a = Step(name="A", dependencies=["B"])
    b = Step(name="B", dependencies=["A"])
    with pytest.raises(CyclicDependency) as error:
        get_orchestrator([a, b]).run()
    assert set(error.value.cycle) == {"A", "B"}
    assert backend.deploy_calls == []


def test_unprovided_dependency_tag(get_orchestrator):
    with pytest.raises(MissingDependency, match="Router"):
        get_orchestrator([Step(name="A", dependencies=["Router"])]).plan()


def test_tag_selection_includes_transitive_dependencies(get_orchestrator, backend):
    steps = [
        Step(name="A"),
        Step(name="B", dependencies=["A"]),
        Step(name="C", dependencies=["B"]),
        Step(name="Unrelated"),
    ]
    get_orchestrator(steps).run(tags=["C"])
    assert backend.deployed_names() == ["A", "B", "C"]


def test_unknown_requested_tag(get_orchestrator):
    with pytest.raises(MissingDependency):
        get_orchestrator([Step(name="A")]).plan(tags=["Nope"])


def test_view_hides_undeclared_records(get_orchestrator):
    a, b = Step(name="A"), Step(name="B")
    orchestrator = get_orchestrator([a, b])
    orchestrator.run()

    context = orchestrator.context_for(b)
    assert context.deployments.get("B").name == "B"
    with pytest.raises(MissingDependency):
        context.deployments.get("A")
    with pytest.raises(ValueError):
        deployer = context.named_accounts["deployer"]
        context.deployments.deploy("A", contract="A", args=[], sender=deployer)


def test_context_accessors(get_orchestrator, named_accounts):
    orchestrator = get_orchestrator([Step(name="A")])
    context = orchestrator.context_for(orchestrator.steps["A"])
    assert context.get_chain_id() == "31337"
    assert context.get_named_accounts() == named_accounts


def test_existing_record_is_reused_across_sessions(get_orchestrator, backend, registry):
    get_orchestrator([Step(name="A")]).run()
    get_orchestrator([Step(name="A")]).run()
    assert backend.deployed_names() == ["A"]


def test_force_redeploys_once_per_session(get_orchestrator, backend):
    step = Step(name="A")
    first = get_orchestrator([step]).run()["A"]

    forced = get_orchestrator([step], force=True)
    second = forced.run()["A"]
    third = forced.run()["A"]

    assert backend.deployed_names() == ["A", "A"]
    assert second.address != first.address
    assert third == second


def test_records_are_per_chain(get_orchestrator, registry, fake_backend):
    mainnet = fake_backend(chain_id="1")
    ropsten = fake_backend(chain_id="3")
    get_orchestrator([Step(name="A")], backend=mainnet).run()
    get_orchestrator([Step(name="A")], backend=ropsten).run()

    assert mainnet.deployed_names() == ["A"]
    assert ropsten.deployed_names() == ["A"]
    assert registry.chain_ids() == ["1", "3"]


def test_config_constants_override_step_defaults(get_orchestrator, backend):
    step = Step(name="A", constructor=["$RATE"], constants={"RATE": 1})
    get_orchestrator([step], constants={"RATE": 5}).run()
    assert backend.deploy_calls == [("A", "A", [5])]


def test_invalid_orchestrator_setup(backend):
    with pytest.raises(ValueError, match="Duplicate"):
        Orchestrator([Step(name="A"), Step(name="A")], backend, {"deployer": "0x1"})
    with pytest.raises(ValueError, match="deployer"):
        Orchestrator([Step(name="A")], backend, {"dev": "0x1"})


def test_provider_is_read_by_name_through_its_tag(get_orchestrator, backend):
    router = Step(name="Router", tags=["AMM"])
    migrator = Step(name="Migrator", dependencies=["AMM"], constructor=["$Router"])
    orchestrator = get_orchestrator([migrator, router])

    records = orchestrator.run()

    assert backend.deployed_names() == ["Router", "Migrator"]
    assert backend.deploy_calls[-1] == ("Migrator", "Migrator", [records["Router"].address])
    assert orchestrator.readable_names(migrator) == {"AMM", "Router"}


def test_chain_dependencies_apply_on_their_chain_only(get_orchestrator, fake_backend):
    token = Step(name="Token")
    consumer = Step(name="Consumer", chain_dependencies={3: ["Token"]})

    ropsten = get_orchestrator([token, consumer], backend=fake_backend(chain_id="3"))
    assert _names(ropsten.plan(tags=["Consumer"])) == ["Token", "Consumer"]

    mainnet = get_orchestrator([token, consumer], backend=fake_backend(chain_id="1"))
    assert _names(mainnet.plan(tags=["Consumer"])) == ["Consumer"]
    assert consumer.dependencies_on("1") == []
    assert consumer.dependencies_on(3) == ["Token"]
