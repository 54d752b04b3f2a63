from .json_type import JSONType
from .uuid_type import UUIDType
from .time import as_utc, utcnow

__all__ = ["JSONType", "UUIDType", "as_utc", "utcnow"]
