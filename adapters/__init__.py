"""
Adapters - Thin HTTP wrappers around unauthenticated Drive endpoints.

http: one bounded GET per retrieval attempt
drive: URL builders, metadata API and viewer page
"""
