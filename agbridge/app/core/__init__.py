############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# __init__.py: Core translation logic package
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Core translation logic for agbridge."""
