"""Minutes document core -- delimiter protocol, parser, serializer, prompts,
session state machine, and archival of accepted output.
"""
