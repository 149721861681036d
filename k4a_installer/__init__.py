"""K4A Installer - Azure Kinect SDK setup assistant for Jetson devices."""

try:
    from k4a_installer._version import version as __version__
except ImportError:
    __version__ = "0.0.0.dev0"
