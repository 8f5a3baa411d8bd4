
from dataclasses import dataclass
from typing import Optional, Type
import importlib, pkgutil
import logging

from ..errors import DuplicateTypeError
from ..tables.base.configured_table import ConfiguredTable
from ..tables.base.typing import LongIdTableProtocol
logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ModelDescriptor:
    model_class: Type[LongIdTableProtocol]
    table: ConfiguredTable

    @classmethod
    def from_model(
        cls,
        model: Type[LongIdTableProtocol],
        type_id: Optional[int] = None,
    ) -> "ModelDescriptor":
        if not hasattr(model, "configured_table"):
            raise TypeError(f"{model.__name__} does not derive from LongIdTableBase")
        return cls(model_class=model, table=model.configured_table(type_id))

    @property
    def type_id(self) -> int:
        return self.table.type_id

    @property
    def table_name(self) -> str:
        return self.table.full_name

    @property
    def cls(self) -> Type[LongIdTableProtocol]:
        return self.model_class


class TypeRegistry:
    """
    Maps entity types to the ORM models whose key columns carry them.

    Models declare their type with ``__longid_type__`` (or are registered
    with an explicit ``type_id``). The registry hands the resulting
    ConfiguredTables to installers and bootstrap scans.
    """

    def __init__(self):
        self._models: dict[int, ModelDescriptor] = {}

    def register_model(self, model: type, type_id: Optional[int] = None) -> ModelDescriptor:
        desc = ModelDescriptor.from_model(model, type_id)
        existing = self._models.get(desc.type_id)
        if existing is not None and existing.model_class is not model:
            raise DuplicateTypeError(desc.type_id)
        self._models[desc.type_id] = desc
        return desc

    def register_models(self, models: list[type]) -> None:
        for m in models:
            self.register_model(m)

    def models(self) -> dict[int, ModelDescriptor]:
        return self._models

    def registered_types(self) -> set[int]:
        return set(self._models.keys())

    def configured_tables(self) -> list[ConfiguredTable]:
        return [self._models[t].table for t in sorted(self._models)]

    def type_for(self, model: type) -> int:
        for desc in self._models.values():
            if desc.model_class is model:
                return desc.type_id
        raise KeyError(f"{model.__name__} is not registered")

    def discover_models(self, package: str) -> None:
        module = importlib.import_module(package)

        for _, modname, _ in pkgutil.walk_packages(
            module.__path__, module.__name__ + "."
        ):
            mod = importlib.import_module(modname)

            for obj in vars(mod).values():
                if not isinstance(obj, type) or obj.__dict__.get("__abstract__", False):
                    continue
                if (
                    hasattr(obj, "__mapper__")
                    and getattr(obj, "__longid_type__", None) is not None
                    and obj.__module__ == mod.__name__
                ):
                    logger.debug(f"Registering model: {obj.__tablename__} as type {obj.__longid_type__:#06x}")
                    self.register_model(obj)
