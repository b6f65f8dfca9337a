from .odata_service import ODataService as ODataService
from .config import ServiceConfig as ServiceConfig
