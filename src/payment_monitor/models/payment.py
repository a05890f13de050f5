"""Failed payment and datastore record models."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import RecordStatus

NOT_AVAILABLE = "N/A"


class FailurePayment(BaseModel):
    """Canonical failed payment extracted from a Stripe event object.

    Optional fields hold the literal "N/A" instead of None so that email and
    record formatting never has to handle a missing value. Amounts are kept in
    minor units (cents) and only divided by 100 for display.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    id: str = Field(
        default=NOT_AVAILABLE,
        description="Stripe object ID (ch_xxx, pi_xxx, in_xxx)",
        examples=["ch_3ABC123DEF456"],
    )
    amount_minor_units: int = Field(
        default=0,
        description="Amount in minor currency units",
        examples=[4999],
    )
    currency: str = Field(
        default=NOT_AVAILABLE,
        description="Upper-cased ISO currency code",
        examples=["USD"],
    )
    customer_email: str = Field(default=NOT_AVAILABLE)
    customer_id: str = Field(default=NOT_AVAILABLE, examples=["cus_ABC123"])
    failure_code: str = Field(default=NOT_AVAILABLE, examples=["card_declined"])
    failure_message: str = Field(default=NOT_AVAILABLE)
    description: str = Field(default=NOT_AVAILABLE)
    source_type: str = Field(default=NOT_AVAILABLE, examples=["card"])

    @property
    def amount(self) -> float:
        """Amount in major currency units."""
        return self.amount_minor_units / 100

    @property
    def display_amount(self) -> str:
        """Amount formatted to two decimals, e.g. "49.99"."""
        return f"{self.amount:.2f}"


class SinkRecord(BaseModel):
    """A row created in the Failed Payments table."""

    model_config = ConfigDict(frozen=True)

    record_id: str = Field(..., description="Datastore record ID", examples=["recABC123"])
    status: RecordStatus
    fields: dict[str, str | float] = Field(default_factory=dict)


def build_record_fields(
    payment: FailurePayment,
    *,
    status: RecordStatus,
    failed_at: str,
) -> dict[str, str | float]:
    """Build the Failed Payments column values for a payment."""
    return {
        "Payment ID": payment.id,
        # Major units (minor / 100), the same figure the email alert shows
        "Amount": payment.amount,
        "Currency": payment.currency,
        "Customer Email": payment.customer_email,
        "Customer ID": payment.customer_id,
        "Failure Code": payment.failure_code,
        "Failure Message": payment.failure_message,
        "Description": payment.description,
        "Failed At": failed_at,
        "Status": status.value,
        "Source": payment.source_type,
    }
