"""Order code reservations: one record per code handed out."""

from protean.fields import DateTime, Identifier

from ordering.domain import ordering


@ordering.aggregate
class OrderCodeReservation:
    code = Identifier(identifier=True, required=True)
    reserved_at = DateTime(required=True)
