# src/procpipe/core/__init__.py
"""
Core do procpipe.

Este pacote reúne a implementação do executor de pipelines de comandos
e as camadas que o apoiam.

Componentes principais:
    - pipeline     → Command, Pipeline, tipos de resultado e RunContext
    - engine       → planejamento da ligação e execução dos estágios
    - config       → leitura, sobreposição de camadas e validação de opções
    - traceability → RunRecord com Event Log para auditoria
    - exceptions   → hierarquia PipelineError
    - errors       → ErrorPayload e catálogo de códigos estáveis

Princípios fundamentais:
    - Nenhuma decisão silenciosa: toda falha é tipada e reportada
    - Nenhum processo filho sobrevive ao retorno do executor
    - Cada execução é independente (sem estado global)
"""
