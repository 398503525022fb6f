import logging


DEFAULT_LOGGER_NAME = 'backprop training logger'


class TrainingLogger(logging.Logger):
    def __init__(self, filename=None, stdout=True, name=DEFAULT_LOGGER_NAME):
        fmt = '[%(asctime)s] %(levelname)-8s %(message)s'
        datefmt = '%Y-%m-%d %H:%M:%S'
        formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

        self.file = filename
        self.stdout = stdout

        logging.Logger.__init__(self, name)
        self.setLevel(logging.DEBUG)

        if self.file is not None:
            fhandler = logging.FileHandler(self.file, mode='w')
            fhandler.setFormatter(formatter)
            self.addHandler(fhandler)

        if self.stdout:
            shandler = logging.StreamHandler()
            shandler.setFormatter(formatter)
            self.addHandler(shandler)

    def progress(self, msg, i, n):
        msg = "(%%0%dd / %d) %s" % (len(str(n)), n, msg.replace('%', '%%'))
        self.info(msg % i)

    def close(self):
        for handler in list(self.handlers):
            handler.close()
            self.removeHandler(handler)
