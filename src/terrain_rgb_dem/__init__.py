"""
terrain-rgb-dem: Terrain-RGB tile to georeferenced elevation raster

Resolves a web-map tile from lon/lat or absolute pixel coordinates, fetches
the Terrain-RGB PNG, decodes elevation in metres, and writes a single-band
float32 GeoTIFF in Web Mercator (EPSG:3857).
"""
