"""Tests for the interrupt gate and turn budget policy."""

import itertools

from craftbot.domain.interrupts import InterruptGate, iter_turns, turn_budget


class TestInterruptGate:
    def test_initially_open(self):
        gate = InterruptGate()
        assert gate.should_interrupt(False) is False
        assert gate.should_interrupt(True) is False

    def test_mute_interrupts_everything(self):
        gate = InterruptGate()
        gate.mute()
        assert gate.muted
        assert gate.should_interrupt(False) is True
        assert gate.should_interrupt(True) is True

    def test_self_prompt_stop_only_hits_self_prompt(self):
        gate = InterruptGate()
        gate.request_self_prompt_stop()
        assert gate.should_interrupt(True) is True
        assert gate.should_interrupt(False) is False

    def test_unmute_leaves_self_prompt_stop(self):
        gate = InterruptGate()
        gate.mute()
        gate.request_self_prompt_stop()
        gate.unmute()
        assert gate.muted is False
        assert gate.self_prompt_stop_requested is True
        assert gate.should_interrupt(True) is True

    def test_clear_self_prompt_stop(self):
        gate = InterruptGate()
        gate.request_self_prompt_stop()
        gate.clear_self_prompt_stop()
        assert gate.should_interrupt(True) is False


class TestTurnBudget:
    def test_configured_limit(self):
        assert turn_budget(5) == 5

    def test_unbounded_config(self):
        assert turn_budget(-1) is None

    def test_override_wins(self):
        assert turn_budget(5, override=2) == 2

    def test_override_unbounded(self):
        assert turn_budget(5, override=-1) is None

    def test_user_message_during_self_prompt(self):
        assert turn_budget(-1, is_self_prompt=False, self_prompt_active=True) == 1

    def test_self_prompt_message_not_limited(self):
        assert turn_budget(-1, is_self_prompt=True, self_prompt_active=True) is None

    def test_override_beats_self_prompt_rule(self):
        assert turn_budget(-1, override=2, self_prompt_active=True) == 2


class TestIterTurns:
    def test_bounded(self):
        assert list(iter_turns(3)) == [0, 1, 2]

    def test_zero(self):
        assert list(iter_turns(0)) == []

    def test_unbounded_keeps_going(self):
        assert len(list(itertools.islice(iter_turns(None), 1000))) == 1000
