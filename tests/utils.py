import os
import time


def get_test_data_resource(filename: str) -> str:
    root = os.path.dirname(os.path.abspath(__file__))
    with open(os.path.join(root, "data", filename), "r") as file:
        file_content = file.read()

    return file_content


def wait_until(predicate, timeout_s: float = 3.0) -> bool:
    deadline = time.time() + timeout_s
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


TEST_CONFIG_VALUE = {
    "bool": True,
    "number": 2,
    "string": "string",
    "object": {
        "key": "value",
        "key2": 123,
    },
    "boolStr1": "true",
    "boolStr2": "FALSE",
    "numberStr1": "3",
    "numberStr2": "3.3",
    "numberStr3": "3.3.3",
}

TEST_GATE_SECONDARY_EXPOSURES = [
    {"gate": "dependent_gate_1", "gateValue": "true", "ruleID": "rule_1"},
    {"gate": "dependent_gate_2", "gateValue": "false", "ruleID": "default"},
]
