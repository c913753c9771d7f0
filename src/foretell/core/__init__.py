"""
Core plumbing shared by the sync pass and the foreground flow.
"""
