"""pydantic v2 integration for sensitivity descriptors.

Used as ``Annotated`` metadata on a model field, a ``SensitivityDescriptor``
wraps the field's serializer. The principal is taken from the serialization
context::

    class Customer(BaseModel):
        username: str
        email: Annotated[str, Sensitive(kind=MaskKind.EMAIL, allowed_roles={"ROLE_ADMIN"})]

    customer.model_dump(context={"principal": Principal(roles={"ROLE_ADMIN"})})

Without a context, or without a principal in it, sensitive fields are masked.
"""

from typing import TYPE_CHECKING, Any, Optional

from pydantic import GetCoreSchemaHandler, SerializationInfo, SerializerFunctionWrapHandler
from pydantic_core import CoreSchema, core_schema

from .redactor import SerializationRedactor, get_default_redactor

if TYPE_CHECKING:
    from ..core.descriptor import SensitivityDescriptor


def sensitive_core_schema(
    descriptor: "SensitivityDescriptor",
    source_type: Any,
    handler: GetCoreSchemaHandler,
    redactor: Optional[SerializationRedactor] = None,
) -> CoreSchema:
    """Return the field's core schema with a redacting wrap serializer installed."""
    schema = handler(source_type)

    def serialize(
        value: Any, nxt: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> Any:
        active = redactor or get_default_redactor()
        principal = active.principal_from_context(info.context)
        return active.redact(value, descriptor, principal, emit=nxt)

    schema["serialization"] = core_schema.wrap_serializer_function_ser_schema(
        serialize, info_arg=True
    )
    return schema
