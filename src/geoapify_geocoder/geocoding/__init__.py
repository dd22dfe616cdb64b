"""
Geocoding Module
--------------
Forward and reverse geocoding against the Geoapify API using requests.
"""
