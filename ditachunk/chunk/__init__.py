"""Chunk map processing: directive resolution, map rewriting, stub topics."""
