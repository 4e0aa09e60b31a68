"""
Engine, streaming and segmentation logic for fleece-chat.
"""
