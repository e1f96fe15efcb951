############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# __init__.py: Root package initialization and version definition
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""agbridge - Chat request translator for the Antigravity backend."""

__version__ = "0.3.0"
