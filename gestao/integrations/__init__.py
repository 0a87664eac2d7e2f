# gestao/integrations/__init__.py
# Clientes HTTP dos serviços externos (Focus NFe e BrasilAPI).

from .focus_nfe_client import FocusNfeClient, FocusResponse
from .brasil_api_client import BrasilApiClient

__all__ = ["FocusNfeClient", "FocusResponse", "BrasilApiClient"]
