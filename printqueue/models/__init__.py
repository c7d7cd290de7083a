from .filament import Filament  # noqa: F401
from .print_job import PrintJob, PrintJobMaterial  # noqa: F401
from .product import Product  # noqa: F401
