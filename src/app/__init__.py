"""App — núcleo do cliente de API: rede, sessão, serviços e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- network/: resolução de endpoint e erros do cliente
- sessions/: sessão, ciclo de vida do token e latch de suspensão
- services/: executor de requisições, bloqueio de conta, autenticação
- infra/: implementações concretas de storage
- protocols/: contratos/interfaces
- domain/: payloads do backend interpretados pelo core
- observability/: logs estruturados, correlation_id, métricas

Padrão: services orquestram; network resolve; sessions guardam estado; infra persiste.
"""
