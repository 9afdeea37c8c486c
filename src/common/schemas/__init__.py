from .intersection import (
    DurationsSchema,
    IntersectionSchema,
    DurationsInput,
    IntersectionInput,
    ResolveLocationRequest,
    RecorderSessionRequest,
    dump_records,
    load_records,
)

__all__ = [
    "DurationsSchema",
    "IntersectionSchema",
    "DurationsInput",
    "IntersectionInput",
    "ResolveLocationRequest",
    "RecorderSessionRequest",
    "dump_records",
    "load_records",
]
