"""
Session Support Classes
"""

from larasession.support.env_helper import EnvHelper
from larasession.support.config import Config
from larasession.support.crypto import Crypto

__all__ = [
    'EnvHelper',
    'Config',
    'Crypto',
]
