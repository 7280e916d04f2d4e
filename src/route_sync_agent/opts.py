"""oslo.config options for the route sync agent.

Deployments that manage their services with ini-style configuration files can
point the agent at one instead of the YAML file.  The options registered here
mirror the YAML sections one-to-one and are converted into the same
:class:`~route_sync_agent.config.AgentConfig`.
"""

from pathlib import Path

from oslo_config import cfg

from kube_routes.emitter import ON_FULL_BLOCK, ON_FULL_DROP

from .config import (
    AgentConfig,
    EmitterConfig,
    InformerConfig,
    KubeConfig,
    ResyncConfig,
    TransportConfig,
)

kube_opts = [
    cfg.StrOpt('namespace',
               help='Namespace holding the app StatefulSets and pods.'),
    cfg.StrOpt('config_path',
               default=None,
               help='Kubeconfig used when in-cluster configuration is '
                    'not available.'),
]

transport_opts = [
    cfg.StrOpt('endpoint',
               default='tcp://*:4222',
               help='ZeroMQ endpoint the route publisher binds to.'),
]

emitter_opts = [
    cfg.IntOpt('buffer_size',
               default=1024,
               min=1,
               help='Number of route messages buffered before dispatch.'),
    cfg.StrOpt('on_full',
               default=ON_FULL_BLOCK,
               choices=[ON_FULL_BLOCK, ON_FULL_DROP],
               help='What to do with a message when the buffer is full.'),
    cfg.FloatOpt('put_timeout',
                 default=None,
                 help='Seconds to wait for buffer space in block mode.'),
]

resync_opts = [
    cfg.FloatOpt('interval',
                 default=10.0,
                 min=0.1,
                 help='Seconds between full re-registrations of all routes.'),
]

informer_opts = [
    cfg.IntOpt('queue_size',
               default=128,
               min=1,
               help='Events buffered per watched kind.'),
    cfg.IntOpt('watch_timeout',
               default=60,
               min=1,
               help='Seconds before a watch stream is re-established.'),
]

GROUPS = (
    ('kube', kube_opts),
    ('transport', transport_opts),
    ('emitter', emitter_opts),
    ('resync', resync_opts),
    ('informers', informer_opts),
)


def register_opts(conf):
    """Register the agent options on ``conf``."""
    for group, opts in GROUPS:
        conf.register_opts(opts, group=group)


def config_from_conf(conf):
    """Build an :class:`AgentConfig` from a parsed oslo.config object."""
    if not conf.kube.namespace:
        raise ValueError("Configuration missing 'kube.namespace'")

    config_path = conf.kube.config_path
    return AgentConfig(
        kube=KubeConfig(
            namespace=conf.kube.namespace,
            config_path=Path(config_path).expanduser() if config_path else None,
        ),
        transport=TransportConfig(endpoint=conf.transport.endpoint),
        emitter=EmitterConfig(
            buffer_size=conf.emitter.buffer_size,
            on_full=conf.emitter.on_full,
            put_timeout=conf.emitter.put_timeout,
        ),
        resync=ResyncConfig(interval=conf.resync.interval),
        informers=InformerConfig(
            queue_size=conf.informers.queue_size,
            watch_timeout=conf.informers.watch_timeout,
        ),
    )


def load_oslo_config(path):
    """Parse the ini file at ``path`` into an :class:`AgentConfig`."""
    conf = cfg.ConfigOpts()
    register_opts(conf)
    conf(args=[], project='route-sync-agent',
         default_config_files=[str(path)])
    return config_from_conf(conf)
