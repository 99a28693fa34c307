import logging
from typing import Any, Dict, Optional, Tuple, Type

from .evaluation_store import EvaluationResult

_logger = logging.getLogger("statsig_client_core")

_NUMBER = (int, float)


class EvaluationDetails:
    """Where a value came from and how fresh the cache was when it was read."""

    reason: str
    lcut: Optional[int]
    received_at: Optional[int]

    def __init__(self, reason: str = "", lcut: Optional[int] = None, received_at: Optional[int] = None):
        self.reason = reason
        self.lcut = lcut
        self.received_at = received_at

    @classmethod
    def from_result(cls, result: Optional[EvaluationResult]) -> "EvaluationDetails":
        if result is None:
            return cls()
        details = result.details
        return cls(details.get("reason") or "", details.get("lcut"), details.get("received_at"))

    def to_dict(self) -> dict:
        return {
            "reason": self.reason,
            "lcut": self.lcut,
            "received_at": self.received_at,
        }


class BaseEvaluation:
    name: str
    rule_id: str
    id_type: str
    details: EvaluationDetails

    def __init__(self, name: str, result: Optional[EvaluationResult]):
        self.name = name
        self.rule_id = result.rule_id if result else ""
        self.id_type = result.id_type if result else ""
        self.details = EvaluationDetails.from_result(result)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "rule_id": self.rule_id,
            "id_type": self.id_type,
            "details": self.details.to_dict(),
            "value": getattr(self, "value", None),
        }

    def get_evaluation_details(self) -> EvaluationDetails:
        return self.details

    def get_name(self) -> str:
        return self.name

    def get_rule_id(self) -> str:
        return self.rule_id

    def get_id_type(self) -> str:
        return self.id_type

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


class FeatureGate(BaseEvaluation):
    value: bool

    def __init__(self, name: str, result: Optional[EvaluationResult] = None):
        super().__init__(name, result)
        self.value = bool(result and result.value is True)


class BaseConfigEvaluation(BaseEvaluation):
    """A JSON object value with typed accessors.

    Every getter returns ``fallback`` when the key is missing or holds a value
    of another type. Booleans never count as numbers.
    """

    value: Dict[str, Any]
    tag = "Config"

    def __init__(self, name: str, result: Optional[EvaluationResult] = None):
        super().__init__(name, result)
        value = result.value if result else None
        self.value = value if isinstance(value, dict) else {}

    def get_value(self) -> Dict[str, Any]:
        return self.value

    def get(self, param_name: str, fallback: Any = None) -> Any:
        if fallback is None:
            return self.value.get(param_name)
        return self._typed(param_name, fallback, (type(fallback),))

    def get_string(self, param_name: str, fallback: str) -> str:
        return self._typed(param_name, fallback, (str,))

    def get_integer(self, param_name: str, fallback: int) -> int:
        return self._typed(param_name, fallback, (int,))

    def get_float(self, param_name: str, fallback: float) -> float:
        res = self._typed(param_name, fallback, _NUMBER)
        return float(res) if isinstance(res, _NUMBER) else res

    def get_bool(self, param_name: str, fallback: bool) -> bool:
        return self._typed(param_name, fallback, (bool,))

    def get_array(self, param_name: str, fallback: list) -> list:
        return self._typed(param_name, fallback, (list,))

    def get_object(self, param_name: str, fallback: dict) -> dict:
        return self._typed(param_name, fallback, (dict,))

    def _typed(self, key: str, fallback: Any, expected: Tuple[Type, ...]) -> Any:
        res = self.value.get(key)
        if res is None:
            return fallback

        is_bool = isinstance(res, bool)
        if isinstance(res, expected) and (bool in expected or not is_bool):
            return res

        _logger.error(
            "[Statsig::%s] Type mismatch - '%s.%s'. Expected %s, got %s",
            self.tag,
            self.name,
            key,
            "/".join(t.__name__ for t in expected),
            type(res).__name__,
        )
        return fallback


class DynamicConfig(BaseConfigEvaluation):
    tag = "DynamicConfig"


class Experiment(BaseConfigEvaluation):
    tag = "Experiment"
    group_name: Optional[str]

    def __init__(self, name: str, result: Optional[EvaluationResult] = None):
        super().__init__(name, result)
        self.group_name = result.group_name if result else None

    def to_dict(self) -> dict:
        base_dict = super().to_dict()
        base_dict["group_name"] = self.group_name
        return base_dict
