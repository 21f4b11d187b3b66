# Upper bound of a cached paste's lifetime, in seconds
# NOTE: a cached TIMED paste never outlives its own expiry (see PasteRetrievalService).
HOT_TTL = 60 * 60  # 60 minutes * 60 seconds = 1 hour
