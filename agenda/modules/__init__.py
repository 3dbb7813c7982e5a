"""Domain modules package."""

from agenda.modules.appointments import models as appointments_models  # noqa: F401
from agenda.modules.scheduling import models as scheduling_models  # noqa: F401
from agenda.modules.units import models as units_models  # noqa: F401
