"""
Utility modules for the PayPay relay
"""
from .config_loader import RelaySettings, load_settings

__all__ = [
    'RelaySettings',
    'load_settings',
]
