"""Deep Zoom Tile Publisher.

Azure Functions workflow that downloads a large source raster from object
storage, cuts it into a Deep Zoom tile pyramid with an external tiler, and
publishes the index and every tile back to storage while reporting job
progress through a status marker object.
"""

__version__ = "0.1.0"
