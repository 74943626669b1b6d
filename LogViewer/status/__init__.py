"""
Status codes and exceptions shared by the log source, the exporter and the settings.
"""
