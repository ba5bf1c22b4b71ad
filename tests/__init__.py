"""Test package for the Angle Matching trainer.

Core tests cover stimulus generation, layout and hit testing without a
display. UI tests run headlessly using pygame's dummy video driver to
avoid opening real windows.  To run these tests, execute ``pytest`` from
the project root.
"""
