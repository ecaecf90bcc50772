"""ORM models. Importing this package registers every table on ``Base.metadata``."""
from quickres.models.event import Event  # noqa: F401
from quickres.models.reservation import Reservation, ReservationToken  # noqa: F401
