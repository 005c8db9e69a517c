"""
schema — Read a project's custom fields and create the ones we're missing.

`gh project field-list` (and the GraphQL API behind it) hands fields back in
a few shapes: a bare list, a list wrapped under "fields"/"nodes"/"items", or
a lone descriptor.  classify() tags the shape, one normaliser per tag turns
it into a flat list of descriptors, and fetch_schema() builds the
name -> RemoteField mapping the importer reads.
"""

import enum
import logging
import time
from dataclasses import dataclass, field

from .catalog import CATALOG, FieldKind, is_reserved, lookup
from .errors import GhError

log = logging.getLogger(__name__)

_WRAPPER_KEYS = ("fields", "nodes", "items")

# Type reported for fields the API doesn't model specially (number, date, text).
_GENERIC_TYPES = ("", "projectv2field")


@dataclass(frozen=True)
class RemoteField:
    name: str
    id: str
    declared_kind: str
    resolved_kind: str
    options: dict = field(default_factory=dict)

    def match_option(self, label):
        """Option label equal to `label`, ignoring case and surrounding whitespace."""
        wanted = label.strip().lower()
        for name in self.options:
            if name.strip().lower() == wanted:
                return name
        return None


# ═════════════════════════════════════════════════════════════════════════════
# RESPONSE SHAPES
# ═════════════════════════════════════════════════════════════════════════════

class Shape(enum.Enum):
    FIELD_LIST = "field_list"
    WRAPPED = "wrapped"
    SINGLE = "single"
    UNKNOWN = "unknown"


def _unwrap(payload):
    for key in _WRAPPER_KEYS:
        inner = payload.get(key)
        if isinstance(inner, list):
            return inner
        if isinstance(inner, dict):
            # {"fields": {"nodes": [...]}} as returned by GraphQL connections
            for sub in _WRAPPER_KEYS:
                if isinstance(inner.get(sub), list):
                    return inner[sub]
    return None


def classify(payload):
    if isinstance(payload, list):
        return Shape.FIELD_LIST
    if isinstance(payload, dict):
        if _unwrap(payload) is not None:
            return Shape.WRAPPED
        if "name" in payload and "id" in payload:
            return Shape.SINGLE
    return Shape.UNKNOWN


_NORMALIZERS = {
    Shape.FIELD_LIST: lambda payload: payload,
    Shape.WRAPPED: _unwrap,
    Shape.SINGLE: lambda payload: [payload],
    Shape.UNKNOWN: lambda payload: [],
}


def normalize(payload):
    """Flat list of field descriptors from any supported response shape."""
    shape = classify(payload)
    if shape is Shape.UNKNOWN and payload not in (None, "", {}, []):
        log.warning("Unrecognised field-list payload (%s); treating as empty",
                    type(payload).__name__)
    return list(_NORMALIZERS[shape](payload))


# ═════════════════════════════════════════════════════════════════════════════
# TYPE INFERENCE
# ═════════════════════════════════════════════════════════════════════════════

def _declared_type(descriptor):
    raw = descriptor.get("type")
    data_type = descriptor.get("dataType")
    if not isinstance(raw, str):
        raw = ""
    # GraphQL nodes carry the real type in dataType next to a generic __typename
    if isinstance(data_type, str) and data_type and _squash(raw) in _GENERIC_TYPES:
        return data_type
    return raw


def _squash(declared):
    return declared.lower().replace("_", "").replace("-", "").replace(" ", "")


def resolve_kind(descriptor):
    """Effective kind of a raw field descriptor.

    First match wins:
      1. declared type mentions single-select  -> SINGLE_SELECT
      2. name is in the catalog                -> catalog kind
      3. declared type is the generic field    -> TEXT
      4. anything else                         -> declared type, upper-cased
    """
    declared = _declared_type(descriptor)
    squashed = _squash(declared)
    if "singleselect" in squashed:
        return FieldKind.SINGLE_SELECT

    name = descriptor.get("name")
    spec = lookup(name) if isinstance(name, str) else None
    if spec is not None:
        return spec.kind

    if squashed in _GENERIC_TYPES:
        return FieldKind.TEXT

    upper = declared.upper()
    try:
        return FieldKind(upper)
    except ValueError:
        return upper


def _is_handle(value):
    return isinstance(value, (str, int)) and not isinstance(value, bool) and value != ""


def _options(raw):
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items()}
    if not isinstance(raw, list):
        return {}
    options = {}
    for opt in raw:
        if not isinstance(opt, dict):
            continue
        label, option_id = opt.get("name"), opt.get("id")
        if isinstance(label, str) and label and _is_handle(option_id):
            options[label] = str(option_id)
    return options


def to_remote_field(descriptor):
    """RemoteField for a descriptor, or None if it is malformed."""
    if not isinstance(descriptor, dict):
        return None
    name, field_id = descriptor.get("name"), descriptor.get("id")
    if not isinstance(name, str) or not name or not _is_handle(field_id):
        return None
    return RemoteField(
        name=name,
        id=str(field_id),
        declared_kind=_declared_type(descriptor),
        resolved_kind=resolve_kind(descriptor),
        options=_options(descriptor.get("options")),
    )


# ═════════════════════════════════════════════════════════════════════════════
# READ & RECONCILE
# ═════════════════════════════════════════════════════════════════════════════

def build_schema(payload):
    schema = {}
    for descriptor in normalize(payload):
        remote = to_remote_field(descriptor)
        if remote is None:
            log.debug("Skipping malformed field descriptor: %r", descriptor)
            continue
        schema[remote.name] = remote
    return schema


def fetch_schema(client, project):
    """name -> RemoteField for the project; {} if the fields can't be read."""
    try:
        payload = client.list_fields(project.number)
    except (GhError, ValueError) as exc:
        log.warning("Could not read project fields: %s", exc)
        return {}
    return build_schema(payload)


def reconcile(client, project, remote_schema, catalog=CATALOG, delay=1.0, sleep=time.sleep):
    """Create every catalog field the project lacks. Returns the names created."""
    created = set()
    for spec in catalog:
        if spec.name in remote_schema:
            log.debug("Field %s already exists", spec.name)
            continue
        if is_reserved(spec.name):
            log.debug("Field %s is a built-in name; not creating it", spec.name)
            continue
        log.info("Creating field: %s (%s)", spec.name, spec.kind)
        try:
            client.create_field(project.number, spec.name, spec.kind, spec.options)
        except GhError as exc:
            log.warning("Could not create field %s: %s", spec.name, exc.stderr or exc)
        else:
            created.add(spec.name)
        sleep(delay)
    return created
