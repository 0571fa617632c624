"""Public package API for objmap."""

from objmap.api import map_of
from objmap.api import mapper_for
from objmap.builder import ExactMapper
from objmap.errors import DuplicateMemberNameError
from objmap.errors import MapperConstructionError
from objmap.errors import ObjectMapError
from objmap.errors import UnsetFieldError
from objmap.errors import UnsupportedMemberAccessError
from objmap.members import MemberDescriptor
from objmap.members import describe_members
from objmap.runtime import DynamicDispatchCache
from objmap.shapes import classify_shape

__all__: list[str] = [
    "map_of",
    "mapper_for",
    "classify_shape",
    "describe_members",
    "DynamicDispatchCache",
    "ExactMapper",
    "MemberDescriptor",
    "ObjectMapError",
    "MapperConstructionError",
    "DuplicateMemberNameError",
    "UnsupportedMemberAccessError",
    "UnsetFieldError",
]
