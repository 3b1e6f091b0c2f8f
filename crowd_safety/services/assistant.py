"""Handle to the external generative text service and alert composition.

The service itself is an opaque collaborator.  Callers receive either a
:class:`ConfiguredAssistant` wrapping a completion callable, or an
:class:`UnconfiguredAssistant` that records why none is available; there
is no module-level client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Literal, Union

from ..core.record import LocationRecord

logger = logging.getLogger(__name__)

Completion = Callable[[str], str]

NOT_CONFIGURED_MESSAGE = "API Key not configured. Unable to generate alert."
EMPTY_REPLY_MESSAGE = "अलर्ट जनरेट करने में असमर्थ।"
FAILURE_MESSAGE = "त्रुटि: अलर्ट जनरेट नहीं किया जा सका।"


@dataclass(frozen=True)
class ConfiguredAssistant:
    complete: Completion
    configured: Literal[True] = True


@dataclass(frozen=True)
class UnconfiguredAssistant:
    reason: str = "API key missing"
    configured: Literal[False] = False


Assistant = Union[ConfiguredAssistant, UnconfiguredAssistant]


def build_assistant(
    api_key: str,
    client_factory: Callable[[str], Completion] | None = None,
) -> Assistant:
    """Resolve the service handle from an API key and a client factory."""
    if not api_key:
        return UnconfiguredAssistant("API key missing")
    if client_factory is None:
        return UnconfiguredAssistant("no client available for the configured key")
    return ConfiguredAssistant(client_factory(api_key))


# ── Alerts ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Alert:
    id: str
    location_name: str
    message: str
    severity: str
    timestamp: str


def alert_severity(risk_score: int) -> str:
    return "critical" if risk_score > 80 else "high"


def build_alert_prompt(record: LocationRecord, emergency: bool = False) -> str:
    """Prompt for a short Hindi public-address alert about *record*."""
    kind = ("CRITICAL EMERGENCY BROADCAST" if emergency
            else "short, urgent, and clear safety alert")
    tone = ("TONE: EXTREMELY URGENT, COMMANDING. Start with 'सावधान!' (Attention!). "
            "Use short sentences." if emergency else "Include an emoji at the start.")
    return (
        "You are an AI assistant for the Varanasi Crowd Management System.\n"
        f"Generate a {kind} in HINDI for the following situation:\n\n"
        f"Location: {record.name}\n"
        f"Current Crowd: {record.current_crowd}\n"
        f"Risk Score: {record.risk_score}/100\n"
        f"Scenario: {record.scenario.value}\n\n"
        "The message should be suitable for a public address system or SMS alert.\n"
        f"{tone}\n"
        "Do not include English translation.\n"
        "Keep it under 30 words."
    )


def compose_alert(
    record: LocationRecord,
    assistant: Assistant,
    emergency: bool = False,
    now: datetime | None = None,
) -> Alert:
    """Ask the assistant for alert text; fall back to a fixed message.

    Service failures are logged and never propagate to the dashboard.
    """
    now = now or datetime.now()
    if not assistant.configured:
        message = NOT_CONFIGURED_MESSAGE
    else:
        try:
            message = assistant.complete(build_alert_prompt(record, emergency)) or EMPTY_REPLY_MESSAGE
        except Exception:
            logger.exception("Alert generation failed for %s", record.name)
            message = FAILURE_MESSAGE
    return Alert(
        id=f"{record.id}-{now.strftime('%H%M%S%f')}",
        location_name=record.name,
        message=message,
        severity=alert_severity(record.risk_score),
        timestamp=now.strftime("%H:%M:%S"),
    )
