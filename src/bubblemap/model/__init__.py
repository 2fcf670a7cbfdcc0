"""
The MODEL layer contains the data structures and geometry of the map.
It has NO knowledge of widgets or event handling; QColor is used only to
parse and lighten colour strings. It deals with records, tags, the animated
layout, the world/screen transform and I/O.
"""
