"""
Value serialization for the encrypted session store.

Values are flattened with jsonpickle so any Python value a session can hold
(primitives, containers, bytes, datetimes, data models) survives the trip
through the encrypted envelope.
"""
from typing import Any

import jsonpickle
from jsonpickle.unpickler import loadclass
from datamodel import BaseModel
from pydantic import BaseModel as PydanticBaseModel


class ModelHandler(jsonpickle.handlers.BaseHandler):
    """ModelHandler.
    This class can handle with serializable Data Models.
    """
    def flatten(self, obj, data):
        data['__dict__'] = self.context.flatten(obj.__dict__, reset=False)
        return data

    def restore(self, obj):
        module_and_type = obj['py/object']
        mdl = loadclass(module_and_type)
        cls = mdl.__new__(mdl) if hasattr(mdl, '__new__') else object.__new__(mdl)
        cls.__dict__ = self.context.restore(obj['__dict__'], reset=False)
        return cls

jsonpickle.handlers.registry.register(BaseModel, ModelHandler, base=True)


class PydanticHandler(jsonpickle.handlers.BaseHandler):
    """PydanticHandler.
    Pydantic models keep fields-set, extra and private state outside
    ``__dict__``; the full pickle state is carried over.
    """
    def flatten(self, obj, data):
        data['__state__'] = self.context.flatten(obj.__getstate__(), reset=False)
        return data

    def restore(self, obj):
        mdl = loadclass(obj['py/object'])
        model = mdl.__new__(mdl)
        model.__setstate__(self.context.restore(obj['__state__'], reset=False))
        return model

jsonpickle.handlers.registry.register(PydanticBaseModel, PydanticHandler, base=True)


def serialize_value(value: Any) -> bytes:
    """Serialize a Python value to bytes for encryption.

    Args:
        value: Python value to serialize.

    Raises:
        RuntimeError: Error converting data to json.

    Returns:
        UTF-8 encoded jsonpickle document.
    """
    try:
        return jsonpickle.encode(value).encode("utf-8")
    except Exception as err:
        raise RuntimeError(err) from err


def deserialize_value(data: bytes) -> Any:
    """Restore a value produced by :func:`serialize_value`.

    Raises:
        ValueError: If the payload is not a jsonpickle document.
    """
    try:
        return jsonpickle.decode(data.decode("utf-8"))
    except Exception as err:
        raise ValueError(f"Cannot restore session value: {err}") from err
