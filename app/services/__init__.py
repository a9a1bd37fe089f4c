"""
Services Package - Multi-step writes shared by the API routers
"""
