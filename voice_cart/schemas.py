"""
Pydantic Schemas for Request/Response Validation

Voice agent function calls arrive as
    {"call": {"call_id": ..., "to_number": ..., "from_number": ...},
     "args": {...function arguments...}}
with camelCase argument names chosen by the agent prompt. Every endpoint
has its own args model; unknown keys are ignored.

Author: Khalil Bannouri
Version: 1.0.0
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CallInfo(BaseModel):
    """Call metadata attached to every function call."""
    model_config = ConfigDict(extra="ignore")

    call_id: str = Field(..., min_length=1, examples=["call_7a3c9e"])
    to_number: Optional[str] = Field(None, examples=["+17039120079"])
    from_number: Optional[str] = Field(None, examples=["+15555550123"])


class ArgsModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


def _reject_bool(v: Any) -> Any:
    if isinstance(v, bool):
        raise ValueError("must be an integer, not a boolean")
    return v


# =============================================================================
# ARGUMENTS
# =============================================================================

class AddItemArgs(ArgsModel):
    item_name: str = Field(..., alias="itemName", examples=["Spicy Sandwich (2pc)"])
    quantity: int = Field(1, examples=[1])
    special_instructions: Optional[str] = Field(None, alias="specialInstructions")
    first_item_spice_level: Optional[str] = Field(None, alias="firstItemSpiceLevel", examples=["Mild"])
    second_item_spice_level: Optional[str] = Field(None, alias="secondItemSpiceLevel", examples=["Hot"])

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_not_bool(cls, v: Any) -> Any:
        return _reject_bool(v)


class RemoveItemArgs(ArgsModel):
    item_name: str = Field(..., alias="itemName", examples=["Fries"])
    quantity_to_remove: Optional[int] = Field(None, alias="quantityToRemove")

    @field_validator("quantity_to_remove", mode="before")
    @classmethod
    def quantity_not_bool(cls, v: Any) -> Any:
        return _reject_bool(v)


class ModifierArgs(ArgsModel):
    """Arguments of both add-modifiers and remove-modifiers."""
    item_name: str = Field(..., alias="itemName", examples=["Spicy Sandwich (2pc)"])
    first_sandwich_mods: list[str] = Field(default_factory=list, alias="firstSandwichMods")
    second_sandwich_mods: list[str] = Field(default_factory=list, alias="secondSandwichMods")

    @field_validator("first_sandwich_mods", "second_sandwich_mods", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class CheckoutArgs(ArgsModel):
    customer_name: Optional[str] = Field(None, alias="customerName", examples=["Jordan"])
    description: Optional[str] = None


# =============================================================================
# REQUESTS
# =============================================================================

class FunctionCall(BaseModel):
    """Request body for read-only cart functions (summary, upsell)."""
    call: CallInfo
    args: dict[str, Any] = Field(default_factory=dict)


class AddItemRequest(BaseModel):
    call: CallInfo
    args: AddItemArgs


class RemoveItemRequest(BaseModel):
    call: CallInfo
    args: RemoveItemArgs


class ModifierRequest(BaseModel):
    call: CallInfo
    args: ModifierArgs


class CheckoutRequest(BaseModel):
    call: CallInfo
    args: CheckoutArgs = Field(default_factory=CheckoutArgs)


# =============================================================================
# RESPONSES
# =============================================================================

class HealthResponse(BaseModel):
    """Response schema for health check."""
    status: str
    environment: str
    cart_store: str
    menu_catalog: str
    locations: str
    payments: str
    providers: dict[str, str]
    timestamp: datetime
