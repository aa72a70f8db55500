"""Núcleo do domínio: modelos, contratos e serviços."""
