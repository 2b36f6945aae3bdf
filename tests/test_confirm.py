from collections import OrderedDict

import pytest
from ape.utils import ZERO_ADDRESS

from zapdeploy.confirm import _confirm_resolution


def _answers(monkeypatch, *answers):
    prompts = list()
    replies = iter(answers)

    def _input(prompt):
        prompts.append(prompt)
        return next(replies)

    monkeypatch.setattr("builtins.input", _input)
    return prompts


def test_zero_address_asks_again(monkeypatch):
    prompts = _answers(monkeypatch, "y", "n")
    with pytest.raises(SystemExit):
        _confirm_resolution(OrderedDict(token=ZERO_ADDRESS), "ZapStake")
    assert prompts == [
        "Deploy ZapStake Y/N? ",
        "Zero Address detected for deployment parameter; Continue? Y/N? ",
    ]


def test_nonzero_address_asks_once(monkeypatch):
    token = "0x6B3595068778DD592e39A122f4f5a5cF09C90fE2"
    prompts = _answers(monkeypatch, "y")
    _confirm_resolution(OrderedDict(token=token), "ZapStake")
    assert prompts == ["Deploy ZapStake Y/N? "]
