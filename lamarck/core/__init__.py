"""Core transcript handling: source resolution, Deepgram response assembly, IR.

source.py resolves the CLI input, assembler.py turns a Deepgram response into
the validated Transcript IR defined in ir.py.
"""
