"""
API package - REST endpoints for TreeShop Ops.
"""
