from pydantic import BaseModel, Field, ConfigDict
import uuid


class DomainBaseModel(BaseModel):
    """所有領域模型的基類"""

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
        validate_assignment=True,
    )


class Entity(DomainBaseModel):
    """實體基類，具有唯一標識符"""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), description="實體唯一識別符"
    )


class ValueObject(DomainBaseModel):
    """值對象基類，通常是不可變的且通過其屬性值來定義相等性"""

    model_config = ConfigDict(frozen=True)
