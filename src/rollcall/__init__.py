"""VirtualRollCall package.

This package is organized by feature modules (users, classes, subjects,
schedules, attendance, settings) around one in-memory store, with a thin
Flask JSON controller layer on top of the service/repository layers.
"""
