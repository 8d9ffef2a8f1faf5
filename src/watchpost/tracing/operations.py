"""Well-known span operation names.

Backends group spans by operation; using these names keeps dashboards
consistent across services.
"""


class Operations:
    """Namespace of operation name constants."""

    HTTP_SERVER = "http.server"
    HTTP_CLIENT = "http.client"

    DB_QUERY = "db.query"
    DB_SQL = "db.sql"
    DB_REDIS = "db.redis"
    DB_MONGO = "db.mongo"
    DB_ELASTICSEARCH = "db.elasticsearch"

    QUEUE_PUBLISH = "queue.publish"
    QUEUE_SUBSCRIBE = "queue.subscribe"
    QUEUE_PROCESS = "queue.process"

    CACHE_GET = "cache.get"
    CACHE_SET = "cache.set"
    CACHE_REMOVE = "cache.remove"

    FILE_READ = "file.read"
    FILE_WRITE = "file.write"
    FILE_DELETE = "file.delete"

    TASK_BACKGROUND = "task.background"
    TASK_SCHEDULED = "task.scheduled"
    TASK_FUNCTION = "task.function"

    SERIALIZE_JSON = "serialize.json"
    SERIALIZE_XML = "serialize.xml"

    GRPC = "grpc"
    GRAPHQL = "graphql"
    RPC = "rpc"
