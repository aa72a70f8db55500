"""
ShakeSync: cliente offline-first do contador diário de shakes.

Mantém token, overlay de perfil, janela de cota diária e contadores
locais consistentes com o backend mesmo com conectividade intermitente.
"""

__version__ = "1.0.0"
