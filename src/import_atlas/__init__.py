"""Import Atlas — map a JS/TS source tree into a module graph and draw it as SVG."""

__version__ = "0.1.0"
