import os
from statsig_client_core import Statsig, StatsigOptions, StatsigUser

# Initialize Statsig
key = os.getenv("STATSIG_CLIENT_KEY")
if key is None:
    raise ValueError("STATSIG_CLIENT_KEY is not set in environment variables.")

# Customized statsigOptions as needed
options = StatsigOptions()
options.environment = "development"
options.output_log_level = "error"

# Create a statsig user, passing fields as needed
user = StatsigUser(
    user_id="user_123",
    email="user@gmail.com",
    country="US",
    # - `custom`: string keys, JSON-compatible values. Example: {"key1": "value1", "key2": 123}
    custom={},
    # - `custom_ids`: string keys and values. Example: {"companyID": "12345"}
    custom_ids={},
    # - `private_attributes`: used for evaluation, never sent with logged events
    private_attributes={},
)

statsig = Statsig()
statsig.initialize(key, user, options).result()

# Check a feature gate
gate_result = statsig.check_gate("a_gate")
print("Feature Gate Result:", gate_result)

# Retrieve experiment details
exp_result = statsig.get_experiment("another_experiment")
print("Experiment Details:")
print(" - Group Name:", exp_result.group_name)
print(" - Rule Id:", exp_result.rule_id)

# Get a dynamic Config
config = statsig.get_config("config_name")
print("Config value:", config.value)

# Log a custom event
statsig.log_event("example_ran", 1, {"source": "examples/example.py"})

# Switch users; values are refetched for the new user
statsig.update_user(StatsigUser(user_id="user_456")).result()
print("Gate for second user:", statsig.check_gate("a_gate"))

# Shutting down statsig flushes pending events
statsig.shutdown()

print("Sample Statsig app executed successfully!")
