import pytest

from zapdeploy.exceptions import MissingDependency, TransactionFailure, UnknownNetwork
from zapdeploy.step import OwnershipHandoff, Step, StepStatus


@pytest.fixture
def ownable_step():
    return Step(name="A", handoffs=[OwnershipHandoff(new_owner="$dev")])


def test_run_twice_deploys_and_transfers_once(get_orchestrator, backend, ownable_step, dev):
    orchestrator = get_orchestrator([ownable_step])

    first = orchestrator.run()["A"]
    second = orchestrator.run()["A"]

    assert first == second
    assert backend.deployed_names() == ["A"]
    assert backend.transfer_calls == [("A", dev, ())]
    assert backend.owner(first) == dev


def test_transfer_skipped_when_owner_is_target(get_orchestrator, backend):
    step = Step(name="A", handoffs=[OwnershipHandoff(new_owner="$deployer")])
    orchestrator = get_orchestrator([step])

    orchestrator.run()

    assert backend.deployed_names() == ["A"]
    assert backend.transfer_calls == []
    assert orchestrator.status()["A"] == StepStatus.OWNERSHIP_TRANSFERRED


def test_transfer_announced(get_orchestrator, ownable_step, dev, capsys):
    get_orchestrator([ownable_step]).run()
    assert f"Transfer ownership of A to {dev}" in capsys.readouterr().out


def test_resume_after_failed_transfer(get_orchestrator, backend, registry, ownable_step, dev):
    backend.fail_transfer.add("A")
    orchestrator = get_orchestrator([ownable_step])

    with pytest.raises(TransactionFailure):
        orchestrator.run()
    assert registry.get(backend.chain_id, "A") is not None
    assert orchestrator.status()["A"] == StepStatus.OWNERSHIP_PENDING

    backend.fail_transfer.clear()
    rerun = get_orchestrator([ownable_step])
    rerun.run()

    assert backend.deployed_names() == ["A"]
    assert backend.transfer_calls == [("A", dev, ())]
    assert rerun.status()["A"] == StepStatus.OWNERSHIP_TRANSFERRED


def test_failed_deployment_leaves_no_record(get_orchestrator, backend, registry):
    backend.fail_deploy.add("A")
    with pytest.raises(TransactionFailure):
        get_orchestrator([Step(name="A")]).run()
    assert registry.get(backend.chain_id, "A") is None


def test_unknown_network_fails_before_deploying(get_orchestrator, fake_backend):
    backend = fake_backend(chain_id=56)
    step = Step(name="Migrator", constructor=["$network:UNISWAP_ROUTER"])

    with pytest.raises(UnknownNetwork) as error:
        get_orchestrator([step], backend=backend).run()

    assert error.value.chain_id == "56"
    assert backend.deploy_calls == []


def test_dependent_receives_dependency_address(get_orchestrator, backend):
    a = Step(name="A")
    b = Step(name="B", dependencies=["A"], constructor=["$A", 7])

    records = get_orchestrator([b, a]).run()

    assert backend.deployed_names() == ["A", "B"]
    assert backend.deploy_calls[1][2] == [records["A"].address, 7]


def test_handoff_of_dependency(get_orchestrator, backend):
    token = Step(name="Token")
    director = Step(
        name="Director",
        dependencies=["Token"],
        constructor=["$Token"],
        handoffs=[OwnershipHandoff(contract="Token", new_owner="$Director")],
    )

    records = get_orchestrator([token, director]).run()

    assert backend.owner(records["Token"]) == records["Director"].address
    assert backend.transfer_calls == [("Token", records["Director"].address, ())]


def test_handoff_extra_args(get_orchestrator, backend, dev):
    step = Step(name="A", handoffs=[OwnershipHandoff(new_owner="$dev", args=(True, False))])
    get_orchestrator([step]).run()
    assert backend.transfer_calls == [("A", dev, (True, False))]


def test_handoff_of_undeclared_contract():
    step = Step(name="A", handoffs=[OwnershipHandoff(contract="B", new_owner="$dev")])
    with pytest.raises(MissingDependency):
        step.validate()


def test_status_transitions(get_orchestrator, ownable_step):
    plain = Step(name="B")
    orchestrator = get_orchestrator([ownable_step, plain])
    assert orchestrator.status() == {
        "A": StepStatus.UNDEPLOYED,
        "B": StepStatus.UNDEPLOYED,
    }

    orchestrator.run()
    assert orchestrator.status() == {
        "A": StepStatus.OWNERSHIP_TRANSFERRED,
        "B": StepStatus.DEPLOYED,
    }


def test_step_restricted_to_chains(get_orchestrator, backend, capsys):
    step = Step(name="Mock", chains=[3])
    records = get_orchestrator([step]).run()

    assert records == {}
    assert backend.deploy_calls == []
    assert "Skipping Mock on chain ID 31337" in capsys.readouterr().out
    assert step.runs_on("3")


def test_step_defaults():
    step = Step(name="ZapStake")
    assert step.contract == "ZapStake"
    assert step.tags == ["ZapStake"]
    assert step.dependencies == []
    assert step.chain_dependencies == {}
    assert repr(step) == "Step(ZapStake)"


def test_skipped_step_status(get_orchestrator, fake_backend):
    step = Step(name="Mock", chains=[3])
    orchestrator = get_orchestrator([step], backend=fake_backend(chain_id=1))
    assert orchestrator.status() == {"Mock": StepStatus.SKIPPED}


def test_owner_comparison_ignores_address_case(get_orchestrator, backend, ownable_step, dev):
    orchestrator = get_orchestrator([ownable_step])
    record = orchestrator.run()["A"]
    backend.owners[record.address] = dev.lower()

    orchestrator.run()

    assert backend.transfer_calls == [("A", dev, ())]
    assert orchestrator.status()["A"] == StepStatus.OWNERSHIP_TRANSFERRED
