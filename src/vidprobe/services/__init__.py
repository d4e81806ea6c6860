"""
Service layer for vidprobe.

Platform detection, extraction strategies, the strategy chain executor,
payload normalization, enrichment and the resolution facade.
"""
