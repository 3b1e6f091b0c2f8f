"""Tests for the generative service handle and alert composition."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

import numpy as np
import pytest

from crowd_safety.core.location import default_registry
from crowd_safety.core.record import Scenario
from crowd_safety.services.assistant import (
    EMPTY_REPLY_MESSAGE,
    FAILURE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    ConfiguredAssistant,
    UnconfiguredAssistant,
    alert_severity,
    build_alert_prompt,
    build_assistant,
    compose_alert,
)
from crowd_safety.simulation.generator import SyntheticGenerator

NOW = datetime(2026, 3, 8, 18, 30, 0)


@pytest.fixture
def record():
    snap = SyntheticGenerator(np.random.default_rng(4)).generate(default_registry())
    return replace(snap[0], risk_score=85, current_crowd=42000, scenario=Scenario.FESTIVAL)


class TestBuildAssistant:
    def test_missing_key(self):
        assistant = build_assistant("")
        assert isinstance(assistant, UnconfiguredAssistant)
        assert not assistant.configured

    def test_key_without_client(self):
        assistant = build_assistant("secret")
        assert not assistant.configured
        assert "no client" in assistant.reason

    def test_configured(self):
        seen = []

        def factory(key):
            seen.append(key)
            return lambda prompt: "ok"

        assistant = build_assistant("secret", factory)
        assert isinstance(assistant, ConfiguredAssistant)
        assert assistant.configured
        assert seen == ["secret"]
        assert assistant.complete("hi") == "ok"


class TestComposeAlert:
    def test_unconfigured_message(self, record):
        alert = compose_alert(record, UnconfiguredAssistant(), now=NOW)
        assert alert.message == NOT_CONFIGURED_MESSAGE
        assert alert.location_name == record.name
        assert alert.timestamp == "18:30:00"

    def test_reply_passed_through(self, record):
        prompts = []

        def complete(prompt):
            prompts.append(prompt)
            return "⚠️ कृपया सावधानी बरतें"

        alert = compose_alert(record, ConfiguredAssistant(complete), now=NOW)
        assert alert.message == "⚠️ कृपया सावधानी बरतें"
        assert len(prompts) == 1
        assert record.name in prompts[0]

    def test_empty_reply(self, record):
        alert = compose_alert(record, ConfiguredAssistant(lambda p: ""), now=NOW)
        assert alert.message == EMPTY_REPLY_MESSAGE

    def test_service_failure_is_logged(self, record, caplog):
        def broken(prompt):
            raise ConnectionError("service down")

        with caplog.at_level(logging.ERROR, logger="crowd_safety.services.assistant"):
            alert = compose_alert(record, ConfiguredAssistant(broken), now=NOW)
        assert alert.message == FAILURE_MESSAGE
        assert "Alert generation failed" in caplog.text

    def test_severity(self, record):
        alert = compose_alert(record, UnconfiguredAssistant(), now=NOW)
        assert alert.severity == "critical"
        calmer = replace(record, risk_score=70)
        assert compose_alert(calmer, UnconfiguredAssistant(), now=NOW).severity == "high"


class TestPrompt:
    @pytest.mark.parametrize("risk,expected", [(81, "critical"), (80, "high"), (61, "high")])
    def test_alert_severity(self, risk, expected):
        assert alert_severity(risk) == expected

    def test_standard_prompt(self, record):
        prompt = build_alert_prompt(record)
        assert "short, urgent, and clear safety alert" in prompt
        assert "Risk Score: 85/100" in prompt
        assert "Scenario: Festival" in prompt
        assert "emoji" in prompt

    def test_emergency_prompt(self, record):
        prompt = build_alert_prompt(record, emergency=True)
        assert "CRITICAL EMERGENCY BROADCAST" in prompt
        assert "सावधान!" in prompt
