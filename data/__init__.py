# Data layer for the campaign dashboard

from .parsers import MarketingDataParser
from .manager import DataManager

__all__ = ['MarketingDataParser', 'DataManager']
