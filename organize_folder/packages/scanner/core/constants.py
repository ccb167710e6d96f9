"""常量定义：集中维护状态码与扫描相关的固定取值。"""

HTTP_STATUS_OK = 200
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_NOT_FOUND = 404
HTTP_STATUS_CONFLICT = 409
HTTP_STATUS_UNPROCESSABLE_ENTITY = 422

# 条目表与应用状态表的表名
ENTRY_TABLE_NAME = "file_objects"
APP_STATE_TABLE_NAME = "app_state"

PATH_MAX_LENGTH = 4096
NAME_MAX_LENGTH = 1024

# SSE 订阅者等待下一条进度事件的超时时间（秒），超时后发送心跳注释行
PROGRESS_STREAM_HEARTBEAT_SECONDS = 15.0
# 每个订阅者队列的最大长度，超出后丢弃最旧的事件
PROGRESS_SUBSCRIBER_QUEUE_SIZE = 10000
