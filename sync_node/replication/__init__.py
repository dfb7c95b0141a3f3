"""
Replication of the authority's config to participants.

The authority broadcasts a positional payload after every local change;
participants decode it into their Server snapshot.
"""
