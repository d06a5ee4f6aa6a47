"""
cms-sync: herramientas de export/sync de contenido hacia Strapi.
"""

__version__ = "1.0.0"
