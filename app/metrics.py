from prometheus_client import Counter, Histogram

# Webhook outcomes by dispatch status.
WEBHOOK_TOTAL = Counter(
    "webex_webhooks_total",
    "Total number of Webex webhook events processed",
    ["status"],
)

# Command executions by matched pattern.
COMMAND_TOTAL = Counter(
    "webex_commands_total",
    "Total number of commands executed",
    ["command"],
)

# Handler run time in seconds, including reply delivery.
COMMAND_LATENCY = Histogram(
    "webex_command_latency_seconds",
    "Time spent running a command handler and sending its reply",
    ["command"],
)

# Outbound Webex API failures (message, person, identity, send).
API_ERRORS = Counter(
    "webex_api_errors_total",
    "Total number of failed Webex API calls made by the dispatcher",
    ["operation"],
)
