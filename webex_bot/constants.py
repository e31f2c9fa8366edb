"""Constants and configuration values for the Webex command bot."""

# Webex REST API
DEFAULT_API_URL = "https://webexapis.com/v1"
API_TIMEOUT_SECONDS = 30.0

# Webhook
WEBHOOK_PATH = "/webex-bot/webhook"
DEFAULT_WEBHOOK_NAME = "webex-command-bot"
WEBHOOK_RESOURCE_MESSAGES = "messages"
WEBHOOK_EVENT_CREATED = "created"

# Room types
ROOM_TYPE_DIRECT = "direct"
ROOM_TYPE_GROUP = "group"

ALLOWED_ROOM_TYPES = [
    ROOM_TYPE_DIRECT,
    ROOM_TYPE_GROUP,
]

# Dispatch statuses
STATUS_SUCCESS = "success"
STATUS_IGNORED = "ignored"
STATUS_ERROR = "error"
STATUS_UNKNOWN_COMMAND = "unknown_command"

# Command priorities (lower wins)
PRIORITY_HELP = 5
PRIORITY_DEFAULT = 10
PRIORITY_CATCH_ALL = 1000

# User-facing text
UNKNOWN_SENDER_NAME = "알 수 없는 사용자"
HANDLER_FAILURE_NOTICE = "명령어 처리 중 오류가 발생했습니다."
HELP_HEADER = "다음 명령어를 사용할 수 있습니다:"

# Time command
DEFAULT_TIMEZONE = "Asia/Seoul"
