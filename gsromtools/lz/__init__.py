"""LZ compression, decompression and output in the command format used by the game's graphics."""