"""Configuration management."""
from .settings import *
from .csv_layout import DEFAULT_LAYOUT, HeuristicLayout
from .layout_loader import LayoutLoader, build_layout, get_layout_loader

__all__ = ['DEFAULT_LAYOUT', 'HeuristicLayout', 'LayoutLoader', 'build_layout', 'get_layout_loader']
