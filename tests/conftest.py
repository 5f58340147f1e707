import os

# Run Qt headless so QApplication can be created without a display.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
