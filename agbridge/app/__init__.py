############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# __init__.py: Application package initialization
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""agbridge Application Package."""

from agbridge import __version__

__all__ = ["__version__"]
