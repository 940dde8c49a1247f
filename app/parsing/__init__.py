"""
app/parsing package marker.
"""
