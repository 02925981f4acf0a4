"""Component configuration models."""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class WorkspaceCredentials:
    """Snowflake workspace credentials stored in a writer configuration."""
    user: str
    host: str = ""
    database: str = ""
    warehouse: str = ""
    password: str = field(default="", repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkspaceCredentials":
        return cls(
            user=data.get("user") or "",
            host=data.get("host", ""),
            database=data.get("database", ""),
            warehouse=data.get("warehouse", ""),
            password=data.get("#password", ""),
        )


@dataclass
class ComponentConfiguration:
    """A configuration of a component as returned by the Storage API."""
    component_id: str
    id: str
    name: str = ""
    description: str = ""
    is_disabled: bool = False
    configuration: Dict[str, Any] = field(default_factory=dict)

    @property
    def db_block(self) -> Optional[Dict[str, Any]]:
        """Raw ``parameters.db`` block, if the configuration has one."""
        db = self.configuration.get("parameters", {}).get("db")
        return db or None

    @property
    def db_credentials(self) -> Optional[WorkspaceCredentials]:
        """Database credentials block, if the configuration has one."""
        db = self.db_block
        if db is None:
            return None
        return WorkspaceCredentials.from_dict(db)

    def with_db_block(self, db: Dict[str, Any]) -> "ComponentConfiguration":
        """Copy of this configuration with the ``db`` block replaced by a copy of ``db``."""
        configuration = copy.deepcopy(self.configuration)
        configuration.setdefault("parameters", {})["db"] = copy.deepcopy(db)
        return ComponentConfiguration(
            component_id=self.component_id,
            id=self.id,
            name=self.name,
            description=self.description,
            is_disabled=self.is_disabled,
            configuration=configuration,
        )

    @classmethod
    def from_dict(cls, component_id: str, data: Dict[str, Any]) -> "ComponentConfiguration":
        """Create from a Storage API configuration payload."""
        return cls(
            component_id=component_id,
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            description=data.get("description", ""),
            is_disabled=bool(data.get("isDisabled", False)),
            configuration=data.get("configuration") or {},
        )
