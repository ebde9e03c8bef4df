"""Mini README: Core package initialiser for LandTrack.

LandTrack keeps the books for smallholder landlords: leased parcels, the
tenant farmers working them, expenses and crop income, plus the landlord and
farmer profit settlement. The package root stays lightweight; import the
sub-packages (``records``, ``relationships``, ``dashboard``, ``settlement``,
``interface``) for the actual services.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
