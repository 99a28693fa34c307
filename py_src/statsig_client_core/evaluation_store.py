import base64
import hashlib
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .output_logger_provider import OutputLogger

TAG = "EvaluationStore"


def hash_name(name: str) -> str:
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")


@dataclass(frozen=True)
class EvaluationResult:
    value: Any
    rule_id: str = ""
    secondary_exposures: List[Dict[str, str]] = field(default_factory=list)
    group_name: Optional[str] = None
    id_type: str = ""
    details: Dict[str, Any] = field(default_factory=dict)


class EvaluationStore:
    """Pre-evaluated gate and config values for the current user.

    Lookups never fail: a missing gate reads as ``False`` and a missing config
    as an empty mapping.
    """

    def __init__(self, logger: OutputLogger):
        self._logger = logger
        self._gates: Dict[str, EvaluationResult] = {}
        self._configs: Dict[str, EvaluationResult] = {}
        self._reason = "Uninitialized"
        self._lcut: Optional[int] = None
        self._received_at: Optional[int] = None
        self.disable_auto_event_logging = False

    def load(self, response: Mapping[str, Any]):
        if not isinstance(response, Mapping):
            raise TypeError(
                f"Initialize response must be an object, got {type(response).__name__}"
            )

        lcut = response.get("time")
        self._lcut = lcut if isinstance(lcut, int) else None
        self._received_at = int(time.time() * 1000)
        self._reason = "Network"

        gates: Dict[str, EvaluationResult] = {}
        for key, raw in _entries(response.get("gates")):
            if isinstance(raw, bool):
                gates[key] = EvaluationResult(value=raw, details=self._details(True))
            else:
                self._put(gates, key, raw, is_gate=True)
        for key, raw in _entries(response.get("feature_gates")):
            self._put(gates, key, raw, is_gate=True)

        configs: Dict[str, EvaluationResult] = {}
        for key, raw in _entries(response.get("dynamic_configs")):
            self._put(configs, key, raw, is_gate=False)

        self.disable_auto_event_logging = response.get("disableAutoEventLogging") is True
        self._gates = gates
        self._configs = configs
        self._logger.debug(TAG, f"Loaded {len(gates)} gates and {len(configs)} configs")

    def clear(self, reason: str = "NoValues"):
        self._gates = {}
        self._configs = {}
        self._reason = reason
        self._lcut = None
        self._received_at = None

    def get_gate(self, name: str) -> EvaluationResult:
        found = self._gates.get(hash_name(name))
        if found is None:
            return EvaluationResult(value=False, details=self._details(False))
        return found

    def get_config(self, name: str) -> EvaluationResult:
        found = self._configs.get(hash_name(name))
        if found is None:
            return EvaluationResult(value={}, details=self._details(False))
        return found

    def _put(self, target: Dict[str, EvaluationResult], key: str, raw: Any, is_gate: bool):
        result = self._decode(raw, is_gate)
        if result is None:
            self._logger.debug(TAG, f"Skipping malformed entry {key}")
            return
        target[key] = result

    def _decode(self, raw: Any, is_gate: bool) -> Optional[EvaluationResult]:
        if not isinstance(raw, Mapping):
            return None

        value = raw.get("value")
        if is_gate and not isinstance(value, bool):
            return None
        if not is_gate and value is None:
            return None

        rule_id = raw.get("rule_id")
        group_name = raw.get("group_name")
        id_type = raw.get("id_type")
        return EvaluationResult(
            value=dict(value) if isinstance(value, Mapping) else value,
            rule_id=rule_id if isinstance(rule_id, str) else "",
            secondary_exposures=_secondary_exposures(raw.get("secondary_exposures")),
            group_name=group_name if isinstance(group_name, str) else None,
            id_type=id_type if isinstance(id_type, str) else "",
            details=self._details(True),
        )

    def _details(self, found: bool) -> Dict[str, Any]:
        reason = self._reason
        if not found and reason == "Network":
            reason = "Unrecognized"
        return {"reason": reason, "lcut": self._lcut, "received_at": self._received_at}


def _entries(section: Any):
    if not isinstance(section, Mapping):
        return []
    return [(key, raw) for key, raw in section.items() if isinstance(key, str)]


def _secondary_exposures(raw: Any) -> List[Dict[str, str]]:
    if not isinstance(raw, list):
        return []
    return [
        {
            "gate": str(exposure.get("gate", "")),
            "gateValue": str(exposure.get("gateValue", "")),
            "ruleID": str(exposure.get("ruleID", "")),
        }
        for exposure in raw
        if isinstance(exposure, Mapping)
    ]
