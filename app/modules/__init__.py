"""Domain modules package."""

from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.booking import models as booking_models  # noqa: F401
from app.modules.catalog import models as catalog_models  # noqa: F401
from app.modules.clients import models as clients_models  # noqa: F401
from app.modules.photographers import models as photographers_models  # noqa: F401
from app.modules.timeoff import models as timeoff_models  # noqa: F401
